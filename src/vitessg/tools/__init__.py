"""External tool collaborators: git, npm, vite preview and the headless browser."""
