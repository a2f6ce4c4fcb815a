"""
Prompt templates for document and client extraction.

The prompts ask for the camelCase JSON shape that ``normalize_extraction``
understands and give the model the user's saved clients and products so it
can propose record ids.
"""
import json
from typing import Any, Sequence

from src.documents.types import DocumentType


def _clients_context(clients: Sequence[Any]) -> str:
    return json.dumps(
        [
            {
                "id": client.id,
                "name": client.name,
                "email": client.email,
                "phone": client.phone,
                "address": client.address,
                "taxNumber": client.tax_number,
            }
            for client in clients
        ],
        indent=2,
    )


def _products_context(products: Sequence[Any]) -> str:
    return json.dumps(
        [
            {
                "id": product.id,
                "name": product.name,
                "description": product.description,
                "unitPrice": product.unit_price,
                "taxRate": product.tax_rate,
            }
            for product in products
        ],
        indent=2,
    )


def build_document_prompt(
    text: str,
    document_type: DocumentType,
    clients: Sequence[Any],
    products: Sequence[Any],
    business_name: str,
    default_tax_rate: str,
) -> str:
    """
    Build the extraction prompt for an invoice or a quote.

    Args:
        text: Free-form description written by the user
        document_type: Invoice or quote
        clients: Saved clients offered for matching
        products: Saved products offered for matching
        business_name: Name of the issuing business
        default_tax_rate: Tax rate (percent) to assume when none is mentioned

    Returns:
        Prompt string
    """
    if document_type is DocumentType.INVOICE:
        kind, other, deadline_key = "invoice", "quote", "dueDate"
        deadline_rule = "Due date (default to 30 days from issue date if not specified)"
    else:
        kind, other, deadline_key = "quote", "invoice", "validUntil"
        deadline_rule = "Valid until date (default to 30 days from issue date if not specified)"

    return f"""
You are an expert {kind} parser for a small business invoicing system. Your task is to analyze unstructured text input and extract structured information about a {kind}.

## CONTEXT
- Business name: {business_name}
- Default tax rate: {default_tax_rate or '0'}%
- The user is creating a {kind.upper()} (not a {other})

## EXISTING CLIENTS
{_clients_context(clients)}

## EXISTING PRODUCTS/SERVICES
{_products_context(products)}

## USER INPUT
\"\"\"
{text}
\"\"\"

## INSTRUCTIONS
1. Extract client information:
   - Try to identify if this matches an existing client from the provided list
   - If it matches an existing client with high confidence, use their ID and information
   - If uncertain, extract as much client information as possible without assigning an ID

2. Extract line items:
   - For each product or service mentioned, identify if it matches an existing product
   - If it matches an existing product with high confidence, include the product ID
   - Extract description, quantity, unit price, and tax rate (if mentioned)

3. Extract other {kind} details:
   - Issue date (default to today if not specified)
   - {deadline_rule}
   - Any notes or special instructions
   - Any discount mentioned

4. Identify unclear information:
   - Flag any ambiguous information that would require clarification
   - Provide specific questions the system should ask the user to clarify

## RESPONSE FORMAT
Respond with JSON only, following this exact structure:
{{
  "client": {{
    "id": "number or null if not matched",
    "name": "string",
    "email": "string or null",
    "phone": "string or null",
    "address": "string or null",
    "taxNumber": "string or null",
    "confidence": "high, medium, or low"
  }},
  "items": [
    {{
      "productId": "number or null if not matched",
      "description": "string",
      "quantity": "string (numeric value)",
      "unitPrice": "string (numeric value)",
      "taxRate": "string (numeric value, percentage)"
    }}
  ],
  "document": {{
    "issueDate": "ISO date string or null",
    "{deadline_key}": "ISO date string or null",
    "notes": "string or null",
    "discount": "string (numeric value) or null"
  }},
  "needsClarification": boolean,
  "clarificationQuestions": ["string"]
}}

Be precise, make reasonable inferences when information is implied but not explicit, and flag for clarification when there's genuine ambiguity. Format monetary values as numeric strings without currency symbols (e.g., "100.00").
"""


def build_client_prompt(text: str, clients: Sequence[Any]) -> str:
    return f"""
You are an expert client information extractor for a business invoicing system. Your task is to analyze unstructured text input and extract structured information about a client.

## EXISTING CLIENTS
{_clients_context(clients)}

## USER INPUT
\"\"\"
{text}
\"\"\"

## INSTRUCTIONS
1. Extract client information from the text: name (company or individual), email, phone, address and tax/VAT number (if present).
2. Check if this matches an existing client. If there's a match with high confidence, include the client's ID. Assess match confidence as high, medium, or low.

## RESPONSE FORMAT
Respond with JSON only, following this exact structure:
{{
  "id": "number or null if not matched",
  "name": "string",
  "email": "string or null",
  "phone": "string or null",
  "address": "string or null",
  "taxNumber": "string or null",
  "confidence": "high, medium, or low"
}}

If information is missing, leave the field as null.
"""
