"""
Static vocabularies shared by the models and the eligibility rules.
"""

# Program-level keys of a posting's requiredBranches block, in the order
# they are checked. The first level that lists the student's branch wins.
PROGRAM_LEVELS = (
    "btech",
    "barch",
    "mtech",
    "mplan",
    "msc",
    "mba",
    "phd",
    "minor_specializations",
)

# Canonical branch id -> accepted spellings (compared lowercased).
# Students historically stored short forms while recruiters pick full names.
BRANCH_ALIASES = {
    "cse": {"cse", "computer science", "computer science & engineering",
            "computer science and engineering"},
    "it": {"it", "information technology"},
    "ece": {"ece", "electronics & communication engineering",
            "electronics and communication engineering", "electronics & communication"},
    "ee": {"ee", "eee", "electrical", "electrical engineering",
           "electrical & electronics engineering", "electrical and electronics engineering"},
    "me": {"me", "mechanical", "mechanical engineering"},
    "ce": {"ce", "civil", "civil engineering"},
    "che": {"che", "chemical", "chemical engineering"},
    "mme": {"mme", "metallurgy", "metallurgical engineering",
            "metallurgical & materials engineering"},
}

# Student year -> spellings used in internship "passing year" lists
YEAR_SPELLINGS = {
    1: ("1st year", "first year", "year 1"),
    2: ("2nd year", "second year", "year 2"),
    3: ("3rd year", "third year", "year 3"),
    4: ("4th year", "fourth year", "year 4", "final year"),
    5: ("5th year", "fifth year", "year 5"),
}

ALUMNI = "Alumni"

# Years a job posting is aimed at by default
FINAL_YEARS = ("4", "5", ALUMNI)

# Phrases in "any other requirement" that rule out active backlogs
BACKLOG_EXCLUSION_PHRASES = ("no backlog", "no pending", "clear academic")

# Accepted values for the student year field (legacy spellings included)
YEAR_ALIASES = {
    "1": "1", "1st": "1", "first": "1",
    "2": "2", "2nd": "2", "second": "2",
    "3": "3", "3rd": "3", "third": "3",
    "4": "4", "4th": "4", "fourth": "4", "final": "4",
    "5": "5", "5th": "5", "fifth": "5",
    "alumni": ALUMNI,
}


def canonical_branch(branch: str):
    """Map a free-text branch label to its canonical id, or None if unknown."""
    if not branch:
        return None
    label = branch.strip().lower()
    for canonical, spellings in BRANCH_ALIASES.items():
        if label in spellings:
            return canonical
    return None


def normalize_year(value):
    """Normalise a stored year ('4th', 4, 'alumni', ...) to '1'..'5' or 'Alumni'."""
    if value is None:
        return None
    label = str(value).strip().lower()
    if label.endswith(" year"):
        label = label[:-len(" year")].strip()
    return YEAR_ALIASES.get(label)
