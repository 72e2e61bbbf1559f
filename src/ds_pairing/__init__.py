"""Host / Datastore / VM pairing check for vSphere inventory snapshots."""

__version__ = "0.1.0"
