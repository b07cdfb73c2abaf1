from hostel_allocation.repositories.resident.resident_directory import ResidentDirectory

__all__ = ["ResidentDirectory"]
