"""Monster group XP tooltip backend."""
