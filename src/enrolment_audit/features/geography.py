from __future__ import annotations

import re

# Indian postal circles keyed by the first two PIN digits. Circles that span
# several states or union territories list all of them.
PIN_PREFIX_STATES: dict[str, frozenset[str]] = {
    "11": frozenset({"delhi"}),
    "12": frozenset({"haryana"}),
    "13": frozenset({"haryana"}),
    "14": frozenset({"punjab"}),
    "15": frozenset({"punjab"}),
    "16": frozenset({"punjab", "chandigarh"}),
    "17": frozenset({"himachal pradesh"}),
    "18": frozenset({"jammu and kashmir"}),
    "19": frozenset({"jammu and kashmir", "ladakh"}),
    "20": frozenset({"uttar pradesh"}),
    "21": frozenset({"uttar pradesh"}),
    "22": frozenset({"uttar pradesh"}),
    "23": frozenset({"uttar pradesh"}),
    "24": frozenset({"uttar pradesh", "uttarakhand"}),
    "25": frozenset({"uttar pradesh", "uttarakhand"}),
    "26": frozenset({"uttar pradesh", "uttarakhand"}),
    "27": frozenset({"uttar pradesh"}),
    "28": frozenset({"uttar pradesh"}),
    "30": frozenset({"rajasthan"}),
    "31": frozenset({"rajasthan"}),
    "32": frozenset({"rajasthan"}),
    "33": frozenset({"rajasthan"}),
    "34": frozenset({"rajasthan"}),
    "36": frozenset({"gujarat", "dadra and nagar haveli and daman and diu"}),
    "37": frozenset({"gujarat"}),
    "38": frozenset({"gujarat"}),
    "39": frozenset({"gujarat", "dadra and nagar haveli and daman and diu"}),
    "40": frozenset({"maharashtra", "goa"}),
    "41": frozenset({"maharashtra"}),
    "42": frozenset({"maharashtra"}),
    "43": frozenset({"maharashtra"}),
    "44": frozenset({"maharashtra"}),
    "45": frozenset({"madhya pradesh"}),
    "46": frozenset({"madhya pradesh"}),
    "47": frozenset({"madhya pradesh"}),
    "48": frozenset({"madhya pradesh"}),
    "49": frozenset({"chhattisgarh"}),
    "50": frozenset({"telangana", "andhra pradesh"}),
    "51": frozenset({"andhra pradesh"}),
    "52": frozenset({"andhra pradesh"}),
    "53": frozenset({"andhra pradesh", "puducherry"}),
    "56": frozenset({"karnataka"}),
    "57": frozenset({"karnataka"}),
    "58": frozenset({"karnataka"}),
    "59": frozenset({"karnataka"}),
    "60": frozenset({"tamil nadu", "puducherry"}),
    "61": frozenset({"tamil nadu"}),
    "62": frozenset({"tamil nadu"}),
    "63": frozenset({"tamil nadu"}),
    "64": frozenset({"tamil nadu"}),
    "67": frozenset({"kerala", "puducherry"}),
    "68": frozenset({"kerala", "lakshadweep"}),
    "69": frozenset({"kerala"}),
    "70": frozenset({"west bengal"}),
    "71": frozenset({"west bengal"}),
    "72": frozenset({"west bengal"}),
    "73": frozenset({"west bengal", "sikkim"}),
    "74": frozenset({"west bengal", "andaman and nicobar islands"}),
    "75": frozenset({"odisha"}),
    "76": frozenset({"odisha"}),
    "77": frozenset({"odisha"}),
    "78": frozenset({"assam"}),
    "79": frozenset(
        {
            "arunachal pradesh",
            "meghalaya",
            "manipur",
            "mizoram",
            "nagaland",
            "tripura",
        }
    ),
    "80": frozenset({"bihar", "jharkhand"}),
    "81": frozenset({"bihar", "jharkhand"}),
    "82": frozenset({"bihar", "jharkhand"}),
    "83": frozenset({"bihar", "jharkhand"}),
    "84": frozenset({"bihar", "jharkhand"}),
    "85": frozenset({"bihar", "jharkhand"}),
}

KNOWN_STATES: frozenset[str] = frozenset().union(*PIN_PREFIX_STATES.values())

STATE_ALIASES = {
    "orissa": "odisha",
    "pondicherry": "puducherry",
    "uttaranchal": "uttarakhand",
    "nct of delhi": "delhi",
    "new delhi": "delhi",
    "chhatisgarh": "chhattisgarh",
    "andaman and nicobar": "andaman and nicobar islands",
    "dadra and nagar haveli": "dadra and nagar haveli and daman and diu",
    "daman and diu": "dadra and nagar haveli and daman and diu",
    "the dadra and nagar haveli and daman and diu": "dadra and nagar haveli and daman and diu",
}

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_place(value: str) -> str:
    text = value.casefold().replace("&", " and ")
    text = _PUNCTUATION.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_state(value: str) -> str:
    normalized = normalize_place(value)
    return STATE_ALIASES.get(normalized, normalized)


def states_for_pincode(pincode: str) -> frozenset[str] | None:
    return PIN_PREFIX_STATES.get(pincode[:2])
