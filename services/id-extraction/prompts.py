"""Prompts for identity document field extraction.

Covers DRC documents (French labels) as well as generic passports, driver's
licenses, national ID and voter cards.
"""

SYSTEM_PROMPT = """You are an expert at extracting data from identity documents.
Extract ALL visible text and information from the ID document image.
Return the data as a JSON object with the following structure:
{
  "idType": "type of document (passport, driver-license, national-id, voter-card)",
  "idNumber": "document number",
  "issueDate": "date of issue in YYYY-MM-DD format",
  "expiryDate": "expiry date in YYYY-MM-DD format",
  "firstName": "first name or prénom",
  "middleName": "middle name or postnom",
  "lastName": "last name or nom",
  "birthDate": "date of birth in YYYY-MM-DD format",
  "birthPlace": "place of birth (city)",
  "nationality": "nationality or nationalité",
  "provinceOfOrigin": "province of origin (for DRC documents)",
  "gender": "M or F",
  "address": "full address if visible",
  "city": "city or ville",
  "province": "province or state",
  "country": "country or pays",
  "phone": "phone number if visible",
  "email": "email address if visible",
  "rawData": "any additional information found"
}

Important:
- Extract dates in YYYY-MM-DD format
- For DRC documents, look for French text (e.g., "Né(e) à" for birth place, "Province d'origine")
- If a field is not visible, use null
- Be accurate and thorough
- For gender, convert to M or F (Masculin=M, Féminin=F)"""


def build_user_prompt(id_type: str) -> str:
    """User instruction naming the caller-supplied document type."""
    return (
        f"Extract all information from this {id_type} document. "
        "Return ONLY valid JSON, no additional text."
    )
