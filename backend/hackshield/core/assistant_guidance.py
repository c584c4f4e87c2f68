"""Assistant Guidance — keyword-routed coding tips used when no model is configured.

Invariants:
    - Topic is chosen by the first matching keyword group, in declaration order
    - Output is deterministic for a given (query, context)
"""

_TOPICS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("debug", ("error", "bug")),
    ("implement", ("how to", "implement")),
    ("optimize", ("optimize", "improve")),
    ("syntax", ("syntax", "how do i write")),
    ("api", ("api", "fetch")),
)


def classify_query(query: str) -> str:
    lowered = query.lower()
    for topic, keywords in _TOPICS:
        if any(k in lowered for k in keywords):
            return topic
    return "general"


def guidance_for(query: str, context: dict | None = None) -> str:
    context = context or {}
    current_file = context.get("current_file")
    language = context.get("language")
    topic = classify_query(query)

    if topic == "debug":
        text = (
            "I can help you debug! Here are some steps:\n\n"
            "1. Check the console/terminal for the exact error message\n"
            "2. Go to the line number mentioned in the error\n"
            "3. Verify variable names are spelled correctly\n"
            "4. Check for missing brackets or parentheses\n"
            "5. Make sure all required imports are present\n"
        )
        if context.get("code"):
            text += (
                f"\nIn {current_file or 'your file'}, look for syntax errors, "
                "undefined variables, missing return statements and wrong call arguments.\n"
            )
        return text + "\nWould you like me to review a specific part of your code?"

    if topic == "implement":
        text = (
            "Here's a general approach:\n\n"
            "1. Break the problem into smaller steps\n"
            "2. Define the data structures you need\n"
            "3. Write pseudo-code first\n"
            "4. Implement one function at a time\n"
            "5. Test as you go\n"
        )
        if language:
            text += f"\nFor {language}, add error handling and keep functions small.\n"
        return text + "\nWhat specific part would you like help with?"

    if topic == "optimize":
        return (
            "Optimization tips:\n\n"
            "- Avoid nested loops over large inputs\n"
            "- Pick the right data structure (lists, maps, sets)\n"
            "- Cache expensive calculations\n"
            "- Split large functions and remove duplicate code\n"
            "- Handle edge cases and validate input\n\n"
            f"Would you like specific suggestions for {current_file or 'your code'}?"
        )

    if topic == "syntax":
        return (
            f"Common patterns in {language or 'this language'}:\n\n"
            "- Variables: descriptive names, sensible defaults\n"
            "- Functions: clear parameters, explicit return values\n"
            "- Control flow: if/else, for/while loops, match/switch\n"
            "- Data structures: lists for order, dicts for key-value pairs, sets for uniqueness\n\n"
            "What specific syntax are you looking for?"
        )

    if topic == "api":
        return (
            "Working with APIs:\n\n"
            "1. Use fetch() in JavaScript or requests/httpx in Python\n"
            "2. Check response status codes and catch network errors\n"
            "3. Parse and validate JSON before using it\n"
            "4. Keep API keys out of source code and add retry logic\n\n"
            "Need help with a specific API call?"
        )

    text = (
        "I can help with debugging, implementing features, optimization, "
        "syntax questions and API integration.\n"
    )
    if current_file:
        text += f"\nCurrently working on: {current_file}\n"
    return text + "\nWhat would you like help with?"
