"""Customer support chat prompt construction"""

from typing import Iterable, Optional

FALLBACK_REPLY = "I'm sorry, I'm having trouble processing your request right now."


def format_product_context(products: Iterable) -> Optional[str]:
    """Render product rows as prompt context, None when there are none"""
    blocks = []
    for product in products:
        lines = [
            f"Product: {product.name}",
            f"Price: ${product.base_price}",
            f"In Stock: {product.in_stock}",
        ]
        if product.description:
            lines.append(f"Description: {product.description}")
        if product.brand_name:
            lines.append(f"Brand: {product.brand_name}")
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks) if blocks else None


def build_system_prompt(store_name: str, product_context: Optional[str]) -> str:
    prompt = (
        f"You are a helpful customer support assistant for {store_name}.\n\n"
        "Be concise, friendly, and helpful. Answer customer questions about products, "
        "orders, repairs, or general information.\n\n"
    )
    if product_context:
        prompt += (
            "Here is relevant product information that might help with the user's query:\n"
            f"{product_context}\n\n"
        )
    prompt += "If you're asked something you don't know, suggest the customer speak with a human agent."
    return prompt
