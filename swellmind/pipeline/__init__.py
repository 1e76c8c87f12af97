"""Background work triggered by session writes (model retraining)."""
