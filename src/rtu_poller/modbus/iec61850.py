"""Human readable descriptions of the IEC 61850 labels used by the producers."""

IEC_DESCRIPTIONS = {
    "VolLocPhsA": "L1 Voltage (V)",
    "VolLocPhsB": "L2 Voltage (V)",
    "VolLocPhsC": "L3 Voltage (V)",
    "AmpLocPhsA": "L1 Current (A)",
    "AmpLocPhsB": "L2 Current (A)",
    "AmpLocPhsC": "L3 Current (A)",
    "WLocPhsA": "L1 Power (W)",
    "WLocPhsB": "L2 Power (W)",
    "WLocPhsC": "L3 Power (W)",
    "AngLocPhsA": "L1 Power factor",
    "AngLocPhsB": "L2 Power factor",
    "AngLocPhsC": "L3 Power factor",
    "Freq": "Frequency of supply voltages (Hz)",
    "TotkWhImport": "Total import (kWh)",
    "TotkWhExport": "Total export (kWh)",
}


def iec_description(label: str | None) -> str:
    if not label:
        return "Value"

    return IEC_DESCRIPTIONS.get(label, label)
