"""
Complaint System Configuration
Complaint types, sub-types, statuses, authority designations and field limits
"""

# Complaint types
COMPLAINT_TYPES = ["Hostel", "College", "Network"]

# Problem categories (shared across types)
SUB_TYPES = [
    "Electrical",
    "Plumbing",
    "Furniture",
    "Internet",
    "Network",
    "Cleanliness",
    "Fan",
    "Socket",
    "Bulb",
    "Window Glass",
    "Chair",
    "Other"
]

# Sub-types that route a complaint to the network department
NETWORK_SUB_TYPES = ["Network", "Internet"]

# Complaint status options (first one is the initial status)
COMPLAINT_STATUS = ["Pending", "In Progress", "Resolved", "Rejected"]
INITIAL_STATUS = "Pending"
RESOLVED_STATUS = "Resolved"

# Authority designations
DESIGNATIONS = ["Hostel Clerk", "Warden", "Network Department", "Other"]
HOSTEL_DESIGNATIONS = ["Hostel Clerk", "Warden"]
NETWORK_DESIGNATION = "Network Department"
NETWORK_DEPARTMENT = "Network"

# Student departments
DEPARTMENTS = [
    "Computer Science",
    "Electrical",
    "Mechanical",
    "Civil",
    "Electronics",
    "Chemical",
    "Production",
    "Metallurgy",
    "Architecture",
    "Planning",
    "Pharmacy",
    "Applied Mathematics",
    "Applied Physics",
    "Applied Chemistry",
    "Management"
]

# Hostel numbers
MIN_HOSTEL_NO = 1
MAX_HOSTEL_NO = 13

# Field limits
MAX_DESCRIPTION_LENGTH = 500
MAX_REMARKS_LENGTH = 200
MAX_COMMENTS_LENGTH = 500
MAX_NAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 8

# Feedback rating bounds
MIN_RATING = 1
MAX_RATING = 5

# Token prefix for complaint tokens
TOKEN_PREFIX = "CMP"

# Notification scope that every hostel sees
ALL_HOSTELS = "all"

# Roles
ROLE_STUDENT = "student"
ROLE_AUTHORITY = "authority"
ROLE_ADMIN = "admin"
ROLES = [ROLE_STUDENT, ROLE_AUTHORITY, ROLE_ADMIN]


def is_network_complaint(complaint_type, sub_type) -> bool:
    """Network-type complaints and network/internet sub-types go to the network department"""
    return complaint_type == "Network" or sub_type in NETWORK_SUB_TYPES


def department_for(designation):
    """Department is derived from designation (only the network department has one)"""
    return NETWORK_DEPARTMENT if designation == NETWORK_DESIGNATION else None
