"""Serial-to-hwmon bridge for a microcontroller driven fan."""
