"""vitessg - static-site generation for Vite front-end repositories."""
