"""
Prompts for recipe extraction using Gemini.
"""

RECIPE_JSON_SHAPE = """Return ONLY valid JSON with this exact structure, no other text:

{
  "title": "Recipe title",
  "total_time": "total time or null",
  "prep_time": "prep time or null",
  "cook_time": "cook time or null",
  "servings": number or null,
  "ingredients": ["ingredient 1 with quantity", "ingredient 2 with quantity", ...],
  "instructions": ["step 1", "step 2", ...],
  "notes": "any useful tips mentioned or null"
}
"""

DOCUMENT_PROMPT = RECIPE_JSON_SHAPE + """
Extract the recipe from the attached document pages or photos.

Rules:
- Extract ALL ingredients and ALL instructions
- Keep ingredient measurements and quantities exactly as written
- Each instruction step should be a separate string
- If a field is not found, use null
- For servings, extract just the number
- For times, use human-readable format like "30 min" or "1 hr 15 min"
- If the pages don't contain a recipe, return: {"error": "no_recipe"}
- Return ONLY the JSON object, no markdown fences or extra text
"""

VIDEO_PROMPT_HEADER = """You are a recipe extraction expert. Below is the {source_label}. Extract the recipe into structured data.

Video title: "{title}"

{text_label}:
{text}

"""

# Appended after RECIPE_JSON_SHAPE; contains literal braces, never str.format it
VIDEO_RULES = """
Rules:
- Extract ALL ingredients with their measurements/quantities
- Write clear, concise instruction steps
- If exact quantities aren't mentioned, make reasonable estimates and note them
- Each instruction step should be a separate string
- If a field is not mentioned, use null
- For servings, extract just the number
- For times, use human-readable format like "30 min" or "1 hr 15 min"
- If the content doesn't appear to contain a recipe, return: {"error": "no_recipe"}
- Return ONLY the JSON object, no markdown fences or extra text
"""

VIDEO_SOURCE_LABELS = {
    "transcript": ("transcript from a YouTube cooking video", "Transcript"),
    "description": ("description of a YouTube cooking video", "Description"),
}

PARSE_TEXT_PROMPT = """You are a recipe extraction assistant. The user has pasted raw text that may be a recipe from any source: a webpage, blog post, cookbook scan, social media post, notes, or anything else.

Extract ALL recipe information and return it as a JSON object.

Rules:
- Return ONLY a valid JSON object, no other text or markdown
- If a field cannot be determined, use null (for strings/numbers) or [] (for arrays)
- title: the recipe name
- ingredients: array of strings, one ingredient per item with quantity and unit (e.g. "2 cups flour")
- instructions: array of strings, one step per item without step numbers (e.g. "Preheat oven to 350°F")
- prep_time: time to prepare before cooking. Look for phrases like "prep time", "preparation time", "prep:", or infer from context. Format as "15 min", "1 hr", etc.
- cook_time: active cooking/baking time. Look for "cook time", "bake time", "cooking time", or similar. Format as "30 min", "1 hr 15 min", etc.
- total_time: total time from start to finish. If explicitly stated use it, otherwise add prep_time + cook_time. Format the same way.
- servings: integer number of servings/portions, or null if not mentioned
- source_name: the website name, blog name, author name, or cookbook title if detectable, otherwise null

Return this exact shape:
{
  "title": string,
  "source_name": string | null,
  "total_time": string | null,
  "prep_time": string | null,
  "cook_time": string | null,
  "servings": number | null,
  "ingredients": string[],
  "instructions": string[]
}

Text to parse:
"""

FORMAT_PROMPTS = {
    "instructions": """You are formatting recipe instructions. The user pasted raw text that may be a wall of text, numbered steps run together, or messy formatting.

Split it into clean, individual instruction steps. Each step should be one clear action.

Rules:
- Return ONLY a JSON array of strings, no other text
- Each string is one step (do NOT include step numbers like "1." or "Step 1:")
- Remove redundant whitespace
- If text is already one-step-per-line, still clean it up but preserve the structure
- Do not add steps that weren't in the original
- Example output: ["Preheat oven to 350°F", "Mix flour and sugar", "Bake for 30 minutes"]

Text to format:
""",
    "ingredients": """You are formatting recipe ingredients. The user pasted raw text that may be a wall of text, comma-separated, or messily formatted.

Split it into clean, individual ingredient lines. Each line should be one ingredient with its quantity and unit.

Rules:
- Return ONLY a JSON array of strings, no other text
- Each string is one ingredient (e.g. "2 cups flour", "1 tsp salt")
- Remove redundant whitespace and bullets/dashes
- Preserve quantities and units exactly as written
- If text is already one-ingredient-per-line, still clean it up
- Do not add ingredients that weren't in the original
- Example output: ["2 cups all-purpose flour", "1 tsp baking soda", "3 large eggs"]

Text to format:
""",
}
