import enum

# --- USER ROLES ---
class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CREW = "CREW"

# --- VESSEL STATUS ---
class VesselStatus(str, enum.Enum):
    ACTIVE = "Active"
    IN_PORT = "In Port"
    UNDER_MAINTENANCE = "Under Maintenance"

# --- ISSUE PRIORITIES ---
class IssuePriority(str, enum.Enum):
    LOW = "Low"
    MED = "Med"
    HIGH = "High"

# --- ISSUE STATUS ---
class IssueStatus(str, enum.Enum):
    OPEN = "Open"
    RESOLVED = "Resolved"
