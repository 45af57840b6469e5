"""Booking, ledger, payment and notification services. Import from the submodules directly."""
