"""Cross-cutting helpers: logging, telemetry and sanitisation."""
