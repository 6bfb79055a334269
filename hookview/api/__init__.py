"""REST API over the webhook record store."""
