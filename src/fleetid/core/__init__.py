"""Core domain logic for fleetid."""
