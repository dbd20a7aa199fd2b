"""Prompt templates that walk a model through using the jq tools."""


def analyze_json_structure(data: str) -> str:
    """Ask for a structural analysis of a JSON document."""
    return f"""Analyze the structure of this JSON data: {data}

Please use jq tools to:
1. Validate the JSON format
2. Extract all keys at the root level
3. Determine the types of values
4. Show the overall structure and depth
5. Identify any arrays and their lengths

Use the available jq tools systematically to provide a comprehensive analysis."""


def transform_json_data(input: str, goal: str) -> str:
    """Ask for a jq transformation that reaches ``goal``."""
    return f"""Transform this JSON data: {input}

Goal: {goal}

Please help me:
1. Analyze the current structure
2. Design the appropriate jq transformation
3. Apply the transformation using jq tools
4. Validate the result

Use the jq tools to achieve the transformation step by step."""


def extract_json_insights(data: str) -> str:
    """Ask for counts, unique values and statistics."""
    return f"""Extract insights from this JSON data: {data}

Please use jq tools to:
1. Count total items/records
2. Find unique values in key fields
3. Calculate statistics (min, max, average) where applicable
4. Identify patterns and relationships
5. Summarize the key findings

Use the available jq tools to perform comprehensive data analysis."""


PROMPTS = {
    "analyze-json-structure": analyze_json_structure,
    "transform-json-data": transform_json_data,
    "extract-json-insights": extract_json_insights,
}
