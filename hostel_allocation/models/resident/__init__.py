from hostel_allocation.models.resident.resident import Resident

__all__ = ["Resident"]
