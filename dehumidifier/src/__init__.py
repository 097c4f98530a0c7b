"""
Midea dehumidifier telemetry collector.

Runs the midea-beautiful-air-cli discovery command, parses its device report
into measurement records, and forwards them to InfluxDB and/or an MQTT
broker, followed by an optional monitoring heartbeat.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

__version__ = "0.1.0"
