"""Parse AI Core - Model client and shared infrastructure."""
