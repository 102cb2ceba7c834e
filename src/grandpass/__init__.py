"""GrandPass visitor portal.

Server-rendered front-end for the GrandPass visitor backend: registration
kiosk, guard and department QR scanners, admin dashboard, department and
faculty portals. Organized by feature modules (visits, scanner, visitors,
directory, users) with a thin Flask controller layer over services and
HTTP-backed repositories.
"""
