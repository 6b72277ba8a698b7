"""Bookings module: accommodation bookings that payments settle."""
