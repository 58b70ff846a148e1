"""Editable static resource and navigation configuration."""

from __future__ import annotations

LINK_PATTERN = r"^/[^\s]+$"
LINK_PATTERN_MESSAGE = "Link must start with / followed by text (e.g., /example)"

# Order of the navigation pane. "dashboard" is not a backend resource.
NAVIGATION: list[tuple[str, str]] = [
    ("dashboard", "Dashboard"),
    ("blogs", "Blogs"),
    ("contents", "Contents"),
    ("menus", "Menu"),
    ("pages", "Page"),
    ("contacts", "Forms"),
    ("clients", "Clients"),
    ("featureimages", "Feature Images"),
    ("settings", "General Settings"),
]

# Field tuples: (name, label, kind, required, wire_name)
# kind is one of: text, multiline, choice, slot, file
RESOURCE_DEFINITIONS: dict[str, dict[str, object]] = {
    "blogs": {
        "title": "Blogs",
        "singular": "Blog",
        "path": "blogs",
        "envelope": "data",
        "multipart": True,
        "fields": [
            ("title", "Title", "text", True, "title"),
            ("author", "Author", "text", False, "author"),
            ("published", "Published", "choice", False, "published"),
            ("content", "Content", "multiline", True, "content"),
            ("image", "Image File", "file", False, "image"),
        ],
        "columns": ["title", "author", "published"],
        "choices": {"published": ["Yes", "No"]},
    },
    "contents": {
        "title": "Contents",
        "singular": "Content Page",
        "path": "contents",
        "envelope": None,
        "fields": [
            ("title", "Title", "text", True, "title"),
            ("slug", "Slug", "text", True, "slug"),
            ("body", "Body", "multiline", True, "body"),
        ],
        "columns": ["title", "slug"],
    },
    "menus": {
        "title": "Menu",
        "singular": "Menu",
        "path": "menus",
        "envelope": None,
        "ordering_space": "menus",
        "fields": [
            ("name", "Menu Name", "text", True, "name"),
            ("link", "Slug", "text", True, "link"),
            ("sort_order", "Sort Order", "slot", True, "sortOrder"),
        ],
        "columns": ["name", "link", "sort_order"],
        "patterns": {"link": (LINK_PATTERN, LINK_PATTERN_MESSAGE)},
    },
    "pages": {
        "title": "Page",
        "singular": "Page",
        "path": "pages",
        "envelope": None,
        "ordering_space": "pages",
        "fields": [
            ("name", "Page Name", "text", True, "name"),
            ("link", "Slug", "text", True, "link"),
            ("sort_order", "Sort Order", "slot", True, "sortOrder"),
            ("meta_data", "Meta Data", "multiline", True, "meta_data"),
            ("content", "Content", "multiline", True, "content"),
        ],
        "columns": ["name", "link", "sort_order"],
        "patterns": {"link": (LINK_PATTERN, LINK_PATTERN_MESSAGE)},
    },
    "contacts": {
        "title": "Forms",
        "singular": "Inquiry",
        "path": "contacts",
        "envelope": None,
        "fields": [
            ("name", "Name", "text", True, "name"),
            ("email", "Email", "text", True, "email"),
            ("phone", "Phone", "text", True, "number"),
            ("subject", "Subject", "text", False, "subject"),
            ("message", "Message", "multiline", True, "message"),
            ("resolved", "Resolved", "choice", False, "resolved"),
        ],
        "columns": ["name", "email", "phone", "subject", "resolved"],
        "choices": {"resolved": ["No", "Yes"]},
        "booleans": ["resolved"],
    },
    "clients": {
        "title": "Clients",
        "singular": "Client",
        "path": "clients",
        "envelope": None,
        "can_create": False,
        "can_edit": False,
        "fields": [
            ("first_name", "First Name", "text", False, "firstName"),
            ("last_name", "Last Name", "text", False, "lastName"),
            ("email", "Email", "text", False, "email"),
            ("phone", "Number", "text", False, "phoneNumber"),
        ],
        "columns": ["first_name", "last_name", "email", "phone"],
    },
    "featureimages": {
        "title": "Feature Images",
        "singular": "Feature Image",
        "path": "featureimages",
        "envelope": "images",
        "multipart": True,
        "fields": [
            ("title", "Title", "text", True, "title"),
            ("image", "Image File", "file", False, "image"),
        ],
        "columns": ["title", "image"],
        "required_on_create": ["image"],
    },
    "settings": {
        "title": "General Settings",
        "singular": "Setting",
        "path": "settings",
        "envelope": None,
        "fields": [
            ("logo", "Logo", "text", True, "logo"),
            ("address", "Address", "text", True, "address"),
            ("contact_number", "Contact Number", "text", True, "contactNumber"),
            ("email", "Email", "text", True, "email"),
            ("script", "Script", "multiline", True, "script"),
        ],
        "columns": ["logo", "address", "contact_number", "email"],
    },
}

REQUIRED_MESSAGES: dict[str, str] = {
    "link": "Link is required",
    "sort_order": "Sort order is required",
    "meta_data": "Meta Data is required",
    "body": "Body content is required",
    "phone": "Phone number is required",
    "contact_number": "Contact number is required",
}

LOGIN_FAILED_MESSAGE = "Invalid email or password. Please try again."
