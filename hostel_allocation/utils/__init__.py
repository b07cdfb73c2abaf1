from hostel_allocation.utils.identifiers import IDGenerator
from hostel_allocation.utils.qr import render_qr_png

__all__ = ["IDGenerator", "render_qr_png"]
