"""Application services - storage, post lifecycle and image processing."""
