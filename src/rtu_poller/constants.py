# constants.py

APP_NAME = "rtu_poller"
CONFIG_FILENAME = "config.toml"

# Valid baud values - the only ones the communication presets use
VALID_BAUD_RATES = [2400, 9600, 19200]

# Config schema with defaults
CONFIG_SCHEMA = {
    "com_port": "", # Empty string means none configured
    "baud": 9600,
    "stop": 1,
    "parity": "N",
    "device_ids": [],
    "default_producer": "sdm",
    "producer_order": ["sdm", "janitza", "dzg"],
    "poll_interval": 5.0,
}

#
# Modbus constants
#
MIN_DEVICE_ID = 1
MAX_DEVICE_ID = 247

READ_HOLDING_REGISTERS = 3
READ_INPUT_REGISTERS = 4

MODBUS_TIMEOUT = 0.3  # seconds

#
# Polling loop
#
MAX_RETRY_COUNT = 5
SETTLE_DELAY = 0.1    # Bus quiet time when switching device
RETRY_DELAY = 0.1     # Pause between two failed attempts

#
# Bus scan
#
SCAN_TIMEOUT = 0.05
SCAN_PROBE_DELAY = 0.04

SCAN_CAVEAT = (
    "WARNING: This lists only the devices that responded to a known probe "
    "request. Devices with different function code definitions might not "
    "be detected."
)
