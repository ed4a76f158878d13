"""Model of a small i686 hobby kernel's console, descriptor tables and PIC, with a FAT12 disk image reader."""

__version__ = "0.1.0"