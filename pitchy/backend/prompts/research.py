RESEARCH_VERSION = "research_v1"

USER_PROMPT_TEMPLATE = """You are a business research assistant. Research the following topic and provide key information that would be useful for a salesperson preparing for a call:

Query: "{query}"

Please provide:
1. A brief 2-3 sentence summary
2. 5-7 key talking points or facts
3. Potential business benefits or value propositions

Format your response as:
SUMMARY: [your summary here]

KEY POINTS:
• [point 1]
• [point 2]
• [point 3]
• [point 4]
• [point 5]

Focus on information that would help a salesperson understand the company, product, or topic better for a sales conversation."""
