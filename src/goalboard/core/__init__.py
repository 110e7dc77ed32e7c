"""Core goalboard modules: models, controllers, and the home service client."""
