PITCH_VERSION = "pitch_v2"

USER_PROMPT_TEMPLATE = """You are a demanding pitch coach. A salesperson just delivered a solo {pitch_length_name} to a customer persona. Evaluate it strictly. Short, empty, or rambling pitches must receive low scores.

TARGET CUSTOMER: {persona_name} - {persona_description}
PITCH FORMAT: {pitch_length_name} ({pitch_length_description})
TIME ALLOTTED: {allotted_seconds} seconds
TIME USED: {actual_seconds} seconds ({time_usage_percent}% of the allotted time)

PITCH TRANSCRIPT:
<<<{transcript}>>>

SCORING GUIDE (each criterion 0-100):
- Clarity: Is the message easy to follow? Is it obvious what is being sold and to whom?
- Persuasiveness: Does the pitch give {persona_name} a reason to care? Are claims backed by proof?
- Structure: Hook, problem, solution, benefits, call to action. Missing parts cost points.
- Time Management: Did the pitch fit the {pitch_length_name} format?
- Impact: Would the customer remember this pitch tomorrow?

TIME RULES:
- Under 50% of the allotted time: Time Management at most 30, and Structure is probably incomplete
- Over 120% of the allotted time: Time Management at most 40
- Between 80% and 110%: Time Management may score well if pacing was deliberate

PENALTIES:
- A transcript of one or two sentences scores below 20 on every criterion
- Filler, repetition, or off-topic rambling loses at least 15 points on Clarity and Impact
- No call to action caps Structure at 50
- Ignoring what {persona_name} cares about caps Persuasiveness at 40

Respond in this exact format and nothing else:

OVERALL SCORE: [integer from 0-100]

CRITERIA SCORES:
Clarity: [0-100]
Persuasiveness: [0-100]
Structure: [0-100]
Time Management: [0-100]
Impact: [0-100]

CRITERIA JUSTIFICATIONS:
Clarity Justification: [one or two sentences citing the transcript]
Persuasiveness Justification: [one or two sentences citing the transcript]
Structure Justification: [one or two sentences naming the parts present and missing]
Time Management Justification: [one or two sentences on time used versus allotted]
Impact Justification: [one or two sentences citing the transcript]

FEEDBACK:
• [The biggest failure in this pitch]
• [A structural element that was missing or weak]
• [Time management critique based on {actual_seconds}s used of {allotted_seconds}s]
• [How to tailor the pitch to {persona_name}]
• [One concrete rewrite of the opening line]"""
