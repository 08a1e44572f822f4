"""HTTP API for the Donation Webhooks service."""
