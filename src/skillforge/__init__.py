"""SkillForge: daily practice sets and skill progression."""
