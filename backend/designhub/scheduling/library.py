"""Standard template library for design projects.

Titles match the date rule table, so the rules fire on seeded projects
without any alias lookups.
"""

# position, title, role; optional "anchor" title + "offset_days" make an offset template
TEMPLATE_LIBRARY = [
    {"position": 1, "title": "Have Initial Consultation", "role": "Designer"},
    {"position": 2, "title": "Confirm Initial Consultation", "role": "Admin"},
    {"position": 3, "title": "Send Design Agreement", "role": "Admin"},
    {"position": 4, "title": "Receive Signed Agreement & Retainer", "role": "Admin"},
    {"position": 5, "title": "Site Measure", "role": "Designer"},
    {"position": 6, "title": "Create Floor Plan", "role": "Designer + Admin"},
    {"position": 7, "title": "Present Design Concept", "role": "Designer"},
    {"position": 8, "title": "Weekly Double Tap – Send IP to Client", "role": "Designer"},
    {"position": 9, "title": "Send Proposal", "role": "Designer, PM"},
    {"position": 10, "title": "Receive Proposal Approval", "role": "PM"},
    {"position": 11, "title": "Place Orders", "role": "Admin"},
    {"position": 12, "title": "Update Jae on Install Timing", "role": "Project Manager"},
    {"position": 13, "title": "Confirm Delivery Dates", "role": "Admin"},
    {"position": 14, "title": "Update Jae on Install Timing", "role": "Project Manager"},
    {"position": 15, "title": "Schedule Install", "role": "PM"},
    {"position": 16, "title": "Install Day", "role": "Designer + PM"},
    {"position": 17, "title": "Send Install Photos", "role": "Designer."},
    {
        "position": 18,
        "title": "Order Thank-You Gift",
        "role": "Admin",
        "anchor": "Install Day",
        "offset_days": 3,
    },
    {"position": 19, "title": "Final Walkthrough", "role": "Designer, PM"},
    {"position": 20, "title": "Send Final Invoice", "role": "Admin"},
    {"position": 21, "title": "Request Review", "role": "Admin"},
]
