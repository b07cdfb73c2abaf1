from hostel_allocation.services.resident.resident_service import ResidentService

__all__ = ["ResidentService"]
