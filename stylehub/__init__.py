"""StyleHub wardrobe backend."""
