"""
Claude AI Prompts for Data Collection

Contains all prompts used for different collection tasks.
"""

SYSTEM_PROMPT = (
    "You are a helpful assistant that provides information about home building companies. "
    "Provide accurate, factual information in JSON format. Return ONLY valid JSON, no additional text."
)


def generate_company_info_prompt(company_name: str) -> str:
    """Generate prompt for describing one home building company."""
    return f"""
Provide information about the home building company "{company_name}".

Return a JSON object with the following fields:
- name: exact company name
- description: brief overview of the company
- website: official website URL if known, otherwise null
- headquarters: city and state, e.g. "Dallas, Texas"
- founded: year founded if known, otherwise null

Only return the JSON object, no additional text.
"""


def generate_plan_collection_prompt(company_name: str, community_name: str) -> str:
    """Generate prompt for collecting plans and quick move-ins of a builder in a community."""
    return f"""
List the home plans and quick move-in homes that "{company_name}" currently offers in the
"{community_name}" community.

Include two kinds of records:
- type "plan": floor plans offered for new construction (base price)
- type "now": quick move-in homes that are built or under construction (list price, usually with an address)

Return a JSON object of the form:
{{
  "plans": [
    {{
      "plan_name": "string",
      "type": "plan" or "now",
      "price": number (USD, no symbols),
      "sqft": number or null,
      "stories": "string" or null,
      "beds": "string" or null,
      "baths": "string" or null,
      "address": "string" or null,
      "design_number": "string" or null
    }}
  ]
}}

Only include homes you have reasonable evidence for. If you find none, return {{"plans": []}}.
Only return the JSON object, no additional text.
"""
