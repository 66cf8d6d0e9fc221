"""
Prompt templates for application content.

Templates are plain str.format strings; ContentGenerator fills them.
"""

COVER_LETTER_SYSTEM = (
    "You are a professional cover letter writer. You read job descriptions closely "
    "and match the candidate's experience to the specific requirements of the role."
)

COVER_LETTER_PROMPT = """Write a targeted cover letter for {full_name} applying for:

ROLE: {job_title}
COMPANY: {company}

CANDIDATE:
- Name: {full_name}
- Location: {location}
- Background: {background_bio}

First, pick out the three or four key responsibilities, the required skills and
any industry terminology in the job description below. Then write a letter that
addresses each responsibility with a concrete example from the candidate's
background, reusing the posting's own keywords.

Structure:
1. Opening: why this role at this company
2. The first major responsibility, with evidence
3. The second major responsibility, with evidence
4. Remaining requirements (skills, qualifications)
5. Closing with a call to action

Format:
- The first line must be "Dear {company} Hiring Team,"
- No email, phone, LinkedIn, dates, addresses or placeholders
- Sign off with: {full_name}
- 400-550 words, confident and specific, no cliches

JOB DESCRIPTION:
{description}
"""

SELECTION_CRITERIA_SYSTEM = (
    "You write selection criteria responses for job applications: concise, specific "
    "statements that address each key requirement directly."
)

SELECTION_CRITERIA_PROMPT = """Write a selection criteria statement for {full_name} applying for:

ROLE: {job_title}
COMPANY: {company}

CANDIDATE:
- Name: {full_name}
- Location: {location}
- Experience: {background_bio}

Identify the three or four key selection criteria in the job description below
and write a 250-400 word statement addressing each one with specific examples.
Open with one introductory sentence. Use short paragraphs or bullet points.
Do not add a heading.

JOB DESCRIPTION:
{description}
"""

SCREENING_ANSWER_SYSTEM = "You write concise, senior-level answers to job screening questions."

SCREENING_ANSWER_PROMPT = """Answer as {full_name}, a senior professional based in {location}.

BACKGROUND:
{background_bio}

ROLE: {job_title} at {company}

Rules:
- 4-7 sentences in a direct, confident tone
- Mention being based in {location} only if the question is about commuting,
  onsite work, availability, local work rights or proximity
- No dates, contact details or cliches

QUESTION:
"{question}"
"""

MULTIPLE_CHOICE_SYSTEM = (
    "You answer job application questions. Reply with only the exact text of the "
    "option to select."
)

MULTIPLE_CHOICE_PROMPT = """Question: {question}

Options:
{options}

Context:
- Australian citizen with full work rights
- Holds a driver's licence
- Based in {location} and able to travel
- Answer yes to capability questions
- For experience questions pick the highest option

Reply with only the exact option text:"""
