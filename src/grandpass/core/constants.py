"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MANILA_TZ = "Asia/Manila"
MANILA_UTC_OFFSET_HOURS = 8

GROUP_KEY_SEPARATOR = "__"

DEFAULT_SESSION_DAYS = 7
DEFAULT_SCAN_LOCK_SECONDS = 30
SCANNER_REARM_SECONDS = 10
DASHBOARD_ROWS_PER_PAGE = 5
DIRECTORY_ROWS_PER_PAGE = 10

VISITOR_ID_RANDOM_DIGITS = 8
TEMP_PASSWORD_LENGTH = 8

# Department id of an office-visit row, in lookup order.
DEPARTMENT_KEYS = ("dept_id", "deptId", "department_id", "department", "dept")

FULL_NAME_KEYS = ("full_name", "fullname", "name", "fullName")
FIRST_NAME_KEYS = ("first_name", "firstName", "firstname", "fname", "given_name")
MIDDLE_NAME_KEYS = ("middle_name", "middleName", "middlename", "mname")
LAST_NAME_KEYS = ("last_name", "lastName", "lastname", "lname", "family_name")
VISITOR_ID_KEYS = ("visitorsID", "visitorsId", "visitors_id", "visitorID")
PROFESSOR_ID_KEYS = ("prof_id", "profId", "professor_id")
