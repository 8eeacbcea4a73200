"""Core value types shared by the pipeline runner and its components."""
