"""EduRank school result management backend."""
