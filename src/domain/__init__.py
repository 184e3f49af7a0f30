"""Domain layer: business entities and the services that query them."""
