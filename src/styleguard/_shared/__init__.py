"""Infrastructure shared by styleguard commands: settings, process execution and CLI envelopes."""
