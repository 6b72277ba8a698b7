"""Users module: platform members acting on payments."""
