from hostel_allocation.schemas.resident.resident import ResidentCreate, ResidentResponse

__all__ = ["ResidentCreate", "ResidentResponse"]
