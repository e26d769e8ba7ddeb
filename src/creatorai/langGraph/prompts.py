# In langGraph/prompts.py

class Prompts:
    GENERATE_LESSON_PART = """
    **Your Persona:** You are an expert instructional designer who writes andragogically sound lesson plans for adult learners, following Merrill's First Principles of Instruction.

    **Your Task:** Write ONLY the **{field_label}** section of the lesson "{lesson_title}".

    **Section Guideline:**
    {guideline}

    **Course Context:**
    {curriculum_json}

    **Generation Options:**
    {options_json}

    **Lesson Sections Already Written (stay consistent with them):**
    {document_json}

    **Previous Lessons (do not repeat them):**
    {previous_lessons}

    **Output Format:** Return a single JSON object with exactly one key, `{field}`.
    """

    GENERATE_PROJECT_PART = """
    **Your Persona:** You are a senior industry practitioner and curriculum designer who writes capstone project specifications for professional training programmes.

    **Your Task:** Write ONLY the **{field_label}** of the capstone project below.

    **Guideline:**
    {guideline}

    **Capstone Project:**
    {document_json}

    **Output Format:** Return a single JSON object with exactly one key, `{field}`.
    """

    REGENERATE_PART = """
    **Your Role:** You are revising one part of an existing {document_label}. Everything else in the document stays as it is.

    **Part To Rewrite:** {field_label}
    **Guideline:** {guideline}

    **Current Document:**
    {document_json}

    **Additional Context:**
    {curriculum_json}
    {options_json}

    **User Instructions:** "{instructions}"

    Apply the user's instructions while keeping the part consistent with the rest of the document.

    **Output Format:** Return a single JSON object with exactly one key, `{field}`.
    """

    REGENERATE_LIST_ITEM = """
    **Your Role:** You are revising ONE item (number {position}) of the **{field_label}** list of an existing {document_label}. The other items are kept as they are.

    **Item To Rewrite:**
    {item_json}

    **Current Document:**
    {document_json}

    **Additional Context:**
    {curriculum_json}

    **User Instructions:** "{instructions}"

    **Output Format:** Return a single JSON object describing the rewritten item, with the same keys as the current item.
    """

    NEW_LIST_ITEM = """
    **Your Role:** You are adding ONE new item to the **{field_label}** list of an existing {document_label}.

    **Current Document (the new item must not duplicate existing ones):**
    {document_json}

    **Additional Context:**
    {curriculum_json}
    {options_json}

    **Output Format:** Return a single JSON object describing the new item.
    """

    PLAN_FILES = """
    **Your Persona:** You are a senior software engineer preparing a starter repository for a learner's capstone project.

    **Capstone Project:**
    {project_json}

    **Your Task:** Plan the file and folder structure of the starter repository.

    **Rules:**
    1. The root MUST contain `README.md` (project brief for the learner) and `SETUP.md` (environment setup guide).
    2. Sibling names must be unique. Keep the tree small and realistic for the tech stack.
    3. Leave every file's `content` empty; contents are written in a later step.
    4. Reports and deliverables are written as markdown files, never as PDFs.

    **Output Format:** Return a JSON object with a single key `fileStructure`: a list of nodes, each `name`, `type` ("file" or "folder"), and `children` for folders.
    """

    REGENERATE_FILES = """
    **Your Persona:** You are a senior software engineer maintaining a learner's capstone starter repository.

    **Capstone Project:**
    {project_json}

    **Current Files:**
    {file_tree}

    **User Instructions:** "{instructions}"

    **Your Task:** Apply the instructions and return the COMPLETE updated repository, including full contents of every text file. `README.md` and `SETUP.md` must stay at the root.

    **Output Format:** Return a JSON object with a single key `fileStructure`: a list of nodes, each `name`, `type` ("file" or "folder"), `content` for files and `children` for folders.
    """

    FILE_CONTENT = """
    **Your Persona:** You are a senior software engineer writing starter code for a learner's capstone project.

    **Capstone Project:**
    {project_json}

    **Repository Layout:**
    {file_tree}

    **Your Task:** Write the complete content of `{file_path}`. Provide scaffolding, clear TODO markers for the learner and no full solution.

    **Output Format:** Return a JSON object with a single key `content`.
    """

    README_CONTENT = """
    **Your Persona:** You are a technical writer producing documentation for a learner's capstone project.

    **Capstone Project:**
    {project_json}

    **Repository Layout:**
    {file_tree}

    **Your Task:** Write `{file_path}` in markdown. A README presents the scenario, the requirements, the deliverables and the assessment criteria. A SETUP guide lists prerequisites, installation steps and how to run the project.

    **Output Format:** Return a JSON object with a single key `content`.
    """

    NOTEBOOK_CONTENT = """
    **Your Persona:** You are a data science instructor preparing a Jupyter notebook for a learner's capstone project.

    **Capstone Project:**
    {project_json}

    **Your Task:** Write the notebook `{file_path}` as a valid nbformat 4 JSON document (cells with markdown explanations and code cells with TODO markers).

    **Output Format:** Return a JSON object with a single key `content` whose value is the notebook JSON as a string.
    """

    PROMPT_SUGGESTION = """
    **Your Role:** You help a user write a better request for generating a {kind}.

    **User's Draft:** "{prompt}"

    **Your Task:**
    1. `summary`: restate in one sentence what the user is asking for.
    2. `suggestion`: rewrite the draft into a more specific request (audience, level, duration, tools, outcomes). Keep the user's intent.

    **Output Format:** Return a JSON object with the keys `summary` and `suggestion`.
    """

    GENERATE_CURRICULA = """
    **Your Persona:** You are an expert instructional designer.

    **Your Task:** For the topic "{topic}", create 6 distinct curriculum outlines. Each outline targets a different learning objective or audience (beginner-focused, project-based, for advanced practitioners, ...).{filter_instructions}

    **Rules:**
    - The first outline is the most comprehensive and balanced one and is marked `recommended: true`. All other outlines are `recommended: false`.
    - Every outline has a concise `title`, a 2-3 sentence `description`, 3-4 `tags` and 4-5 key `learningOutcomes`.
    - The first tag is always the difficulty level ('Beginner', 'Intermediate' or 'Advanced'), assigned from the actual difficulty.
    - {lesson_breakdown}
    - Do not use LaTeX or other special formatting; write symbols out as text.

    **Agent Thoughts:** Finally, list in `agentThoughts` the reasoning behind the variations you created.

    **Output Format:** Return a JSON object with the keys `curriculums` and `agentThoughts`.
    """

    GENERATE_PROJECT_IDEAS = """
    **Your Persona:** You are an expert curriculum and project strategist for tech education.

    **Your Task:** For the trending topic "{topic}", {industry_label}, create 10 distinct capstone project outlines. Each outline targets a different angle or complexity.

    **Rules:**
    - The first project is the most balanced and comprehensive one and is marked `recommended: true`. All other projects are `recommended: false`.
    - Every project has a concise `title`, a one-sentence `description`, 3-4 `learningOutcomes`, 3-4 `tags` (the first tag MUST be the difficulty level: 'Beginner', 'Intermediate' or 'Advanced'), a `techStack`, 3-4 high-level `projectRequirements` and 2-3 `deliverables`.
    - Tech stack: be decisive and choose one technology per purpose ("React", never "React or Vue"). If the project is not a programming project, the tech stack is an empty list.
    - Do not use LaTeX or other special formatting; write symbols out as text.

    **Agent Thoughts:** Finally, list in `agentThoughts` the reasoning behind the project variations you created.

    **Output Format:** Return a JSON object with the keys `projects` and `agentThoughts`.
    """

    ANALYZE_ANDRAGOGY = """
    **Your Persona:** You are an Expert Andragogical Auditor and Instructional Designer.

    **Your Task:** Analyze the {content_label} below and show how it adheres to advanced andragogical frameworks. For each principle, write a specific 1-2 sentence explanation that cites evidence from the content: quote or reference concrete tasks, tools, objectives or sections. Never give generic definitions.

    **Content To Analyze:**
    "{content}"

    **Frameworks To Audit:**
    1. `poLD`, the 6 Principles of Learning Design: `authentic` (real-world tasks and complexity), `alignment` (outcomes match activities and assessments), `holistic` (doing, thinking and professional identity), `feedback` (actionable feedback mechanisms), `judgement` (how the learner evaluates quality), `future` (adaptability and transfer).
    2. `boud`, David Boud's features of practice: `situated` (the learner's professional role), `mediated` (professional tools that mediate the learning), `relational` (team or client framing).
    3. `billett`, Stephen Billett's workplace learning: `affordances` (how the structure invites participation), `guidance` (how expert guidance is scaffolded).
    4. `merrill`, Merrill's First Principles: `problem`, `activation`, `demonstration`, `application`, `integration`.
    5. `bloom`, Bloom's Taxonomy: `progression` (which cognitive levels are targeted, in which order).
    6. `vygotsky`, Social Constructivism: `zpd`, `scaffolding`, `social` (collaboration or peer review), `mko` (how the content acts as the More Knowledgeable Other).

    **Output Format:** Return a single JSON object with the keys `poLD`, `boud`, `billett`, `merrill`, `bloom` and `vygotsky`. All values are concise plain text.
    """

    VARY_CURRICULUM = """
    **Your Persona:** You are an expert curriculum designer.

    **Your Task:** You are given an existing course and an instruction to vary one of its lessons. Regenerate the ENTIRE course outline so that it reflects the change.

    **Original Course:**
    {curriculum_json}

    **Variation Request:**
    - Vary this lesson: "{original_lesson_title}"
    - Instructions: "{instructions}"

    **Rules:**
    1. Give the course a new `title` that reflects the variation.
    2. Write a new list of `lessons` (titles only). The number of lessons may change; keep a logical flow.
    3. Write a new `description` and new `tags`. The first tag is the difficulty level.

    **Output Format:** Return a JSON object with the keys `title`, `description`, `tags` and `lessons`.
    """


# Per-field guidance. Lesson-plan fields follow Merrill's phases.
FIELD_GUIDELINES = {
    "overview": "Markdown with Purpose, Real-world relevance and Links to the course intended learning outcomes.",
    "learningObjectives": "A list of lesson-level objectives. Each starts with a Bloom's taxonomy verb and states a clear performance expectation.",
    "activation": "Elicit prior knowledge and workplace experience, and connect the lesson to a real problem.",
    "demonstration": "Show expert modelling with worked examples of quality performance.",
    "application": "An authentic task mirroring real practice, using tools as affordances, with scaffolded support.",
    "integration": "Learners transfer the concepts to a new or unfamiliar context and justify their decisions.",
    "reflectionAndAssessment": "Feedback and judgement cycle: self-assessment, peer critique, reflection questions and formative micro-assessments.",
    "exercises": "Interactive exercises, each with a problem, a hint, an answer and an explanation.",
    "quiz": "Multiple-choice questions, each with options, the correct answer and an explanation.",
    "detailedDescription": "Markdown with `## Project Overview`, `## Scenario` (a blockquoted real-world brief), `## Core Features` (nested bullet list) and optionally `## Key Technical Considerations`.",
    "techStack": "Confirm the tech stack. Specific libraries or versions are welcome. Be decisive: never list alternatives.",
    "learningOutcomes": "Refine the initial list into 4-6 specific, measurable learning outcomes.",
    "projectRequirements": "An itemized list of functional and non-functional requirements. Be specific.",
    "deliverables": "An itemized list of professional-quality deliverables (hosted application, repository with README, reflection).",
    "constraints": "Constraints on tools, data, roles, timeline and workplace conditions.",
    "futureOrientedElement": "An unfamiliar scenario or inquiry-based task that builds adaptability.",
    "participationModel": "How the learner observes, assists and performs throughout the project.",
    "evidenceOfLearning": "Tangible evidence of learning: artefacts, demonstrations, self-evaluation.",
    "assessmentFeedback": "The assessment strategy, formative checkpoints and feedback mechanisms (dialogic, peer, self, expert).",
    "judgementCriteria": "Quality expectations and observable performance indicators.",
}
