"""Infrastructure layer: session storage, wire encoders, transports and wiring."""
