import optparse

from rtu_poller.constants import MAX_DEVICE_ID, MIN_DEVICE_ID, VALID_BAUD_RATES


def validate_baudrate(option, opt_str, value, parser):
    try:
        baud = int(value)
        if baud not in VALID_BAUD_RATES:
            raise ValueError
        setattr(parser.values, option.dest, baud)
    except Exception:
        parser.error(f"Invalid baudrate: {value}. Valid values are: {', '.join(map(str, VALID_BAUD_RATES))}.")


def make_parser() -> optparse.OptionParser:
    parser = optparse.OptionParser()

    parser.set_usage("usage: %prog [options] device_id[:producer] [device_id[:producer] ...]")

    parser.add_option("-d", "--debug", action="store_true", dest="debug", default=False,
        help="Enable debug logging")

    parser.add_option("-v", "--verbose", action="store_true", dest="verbose", default=False,
        help="Log the detail of every failed query")

    parser.add_option("-c", "--comport", dest="comport", default=None,
        help="Specify the comport to use")

    parser.add_option("-b", "--baudrate", dest="baudrate", default=None, type="string",
        action="callback", callback=validate_baudrate,
        help="Specify the baudrate (2400, 9600 or 19200)")

    parser.add_option("-s", "--serial", dest="serial", default=None,
        help="Specify the serial configuration. Valid values are: 8N1, 8E1.")

    parser.add_option("-t", "--comset", dest="comset", default=None, type="int",
        help="Communication preset: 1=2400 8N1, 2=9600 8N1, 3=19200 8N1, "
             "4=2400 8E1, 5=9600 8E1, 6=19200 8E1")

    parser.add_option("-i", "--interval", dest="interval", default=None, type="float",
        help="Seconds between two polling rounds")

    parser.add_option("--scan", dest="scan", default=False, action="store_true",
        help="Scan the bus for known devices and exit")

    return parser


def parse_args(argv=None):
    """Returns the options and the list of devices as 'id' or 'id:producer' strings"""
    parser = make_parser()
    (options, args) = parser.parse_args(argv)

    devices = []

    for arg in args:
        device_id, _, producer = arg.partition(":")

        try:
            value = int(device_id)
        except ValueError:
            parser.error(f"Invalid device ID: {arg}. Must be an integer between {MIN_DEVICE_ID} and {MAX_DEVICE_ID}.")

        if not MIN_DEVICE_ID <= value <= MAX_DEVICE_ID:
            parser.error(f"Invalid device ID: {arg}. Valid values are {MIN_DEVICE_ID} to {MAX_DEVICE_ID}.")

        devices.append(f"{value}:{producer}" if producer else str(value))

    return options, devices
