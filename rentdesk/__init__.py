"""RentDesk tenant journey service."""
