"""Service layer used by the vimman CLI."""
