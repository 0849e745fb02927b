"""STOMP-over-WebSocket messaging."""
