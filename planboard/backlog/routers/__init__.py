"""HTTP routers for the backlog API."""
