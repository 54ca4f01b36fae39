# app/domain/services/gstin_utils.py
"""GSTIN, state-code and HSN/SAC helpers."""

import re

PAN_REGEX = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
GSTIN_REGEX = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
HSN_REGEX = re.compile(r"^[0-9]{4}([0-9]{2})?([0-9]{2})?$")
SAC_REGEX = re.compile(r"^[0-9]{6}$")

# Chapter 99 of the GST classification is services (SAC)
SAC_CHAPTER_PREFIX = "99"

STATE_CODES: dict[str, str] = {
    "01": "Jammu and Kashmir", "02": "Himachal Pradesh", "03": "Punjab",
    "04": "Chandigarh", "05": "Uttarakhand", "06": "Haryana", "07": "Delhi",
    "08": "Rajasthan", "09": "Uttar Pradesh", "10": "Bihar", "11": "Sikkim",
    "12": "Arunachal Pradesh", "13": "Nagaland", "14": "Manipur", "15": "Mizoram",
    "16": "Tripura", "17": "Meghalaya", "18": "Assam", "19": "West Bengal",
    "20": "Jharkhand", "21": "Odisha", "22": "Chhattisgarh", "23": "Madhya Pradesh",
    "24": "Gujarat", "25": "Daman and Diu", "26": "Dadra and Nagar Haveli",
    "27": "Maharashtra", "29": "Karnataka", "30": "Goa", "31": "Lakshadweep",
    "32": "Kerala", "33": "Tamil Nadu", "34": "Puducherry",
    "35": "Andaman and Nicobar Islands", "36": "Telangana", "37": "Andhra Pradesh",
    "38": "Ladakh", "97": "Other Territory",
}


def is_valid_pan(pan: str | None) -> bool:
    if not pan:
        return False
    pan = pan.strip().upper()
    return bool(PAN_REGEX.match(pan))


def is_valid_gstin(gstin: str | None) -> bool:
    if not gstin:
        return False
    gstin = gstin.strip().upper()
    if not GSTIN_REGEX.match(gstin):
        return False

    # Extra: check PAN part inside GSTIN
    pan_part = gstin[2:12]  # chars 3–12
    return is_valid_pan(pan_part)


def state_code_from_gstin(gstin: str | None) -> str | None:
    if not is_valid_gstin(gstin):
        return None
    return gstin.strip()[:2]


def format_gstin(gstin: str | None) -> str:
    """``27AABCT1234F1Z5`` -> ``27 AABCT 1234 F 1Z 5`` for printing."""
    if not gstin:
        return ""
    cleaned = re.sub(r"\s", "", gstin)
    if len(cleaned) != 15:
        return gstin
    return " ".join([
        cleaned[0:2], cleaned[2:7], cleaned[7:11], cleaned[11:12], cleaned[12:14], cleaned[14:],
    ])


def determine_interstate(business_gstin: str | None, customer_gstin: str | None) -> bool:
    """Interstate iff both GSTINs are valid and their state codes differ.

    Unregistered customers (no GSTIN) are treated as intrastate supplies.
    """
    business_state = state_code_from_gstin(business_gstin)
    customer_state = state_code_from_gstin(customer_gstin)
    if not business_state or not customer_state:
        return False
    return business_state != customer_state


def state_name(state_code: str) -> str:
    return STATE_CODES.get(state_code, state_code)


def place_of_supply(state_code: str) -> str:
    return f"{state_code}-{state_name(state_code)}"


def all_states() -> list[dict[str, str]]:
    return [{"code": code, "name": name} for code, name in STATE_CODES.items()]


# ---------------------------------------------------------------------------
# HSN / SAC
# ---------------------------------------------------------------------------

def validate_hsn_code(code: str | None) -> bool:
    """HSN codes are numeric, 4, 6 or 8 digits."""
    if not code:
        return False
    return bool(HSN_REGEX.match(code.strip()))


def validate_sac_code(code: str | None) -> bool:
    if not code:
        return False
    return bool(SAC_REGEX.match(code.strip()))


def validate_hsn_sac_code(code: str | None) -> bool:
    return validate_hsn_code(code) or validate_sac_code(code)


def is_goods_code(code: str | None) -> bool:
    """A syntactically valid HSN code outside the services chapter."""
    if not validate_hsn_code(code):
        return False
    return not code.strip().startswith(SAC_CHAPTER_PREFIX)
