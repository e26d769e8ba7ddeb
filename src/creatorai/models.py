from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --------------------------
# Project file tree
# --------------------------
class FileNode(BaseModel):
    name: str
    type: Literal["file", "folder"]
    content: Optional[str] = None
    children: Optional[List["FileNode"]] = None

    @model_validator(mode="after")
    def _normalise_variant(self):
        # a folder always has a (possibly empty) child list, a file always has content
        if self.type == "folder" and self.children is None:
            self.children = []
        if self.type == "file" and self.content is None:
            self.content = ""
        return self


class ProjectFilesData(BaseModel):
    fileStructure: List[FileNode] = Field(description="The root-level files and folders of the project.")


class FileContent(BaseModel):
    content: str = Field(description="The complete, well-formatted code or text for the specified file.")


# --------------------------
# Lesson plan
# --------------------------
class Exercise(BaseModel):
    problem: str = Field(description="The problem statement for the exercise.")
    hint: str = Field(description="A hint to help the learner if they are stuck.")
    answer: str = Field(description="The correct answer or solution to the problem.")
    explanation: str = Field(description="A detailed explanation of the solution.")


class QuizQuestion(BaseModel):
    question: str
    options: List[str]
    answer: str
    explanation: str = Field(description="A detailed explanation for why the answer is correct.")


class LessonPlan(BaseModel):
    overview: str = Field(description="Markdown overview: purpose, real-world relevance and links to course ILOs.")
    learningObjectives: List[str] = Field(description="Lesson-level objectives, each with a Bloom's taxonomy verb.")
    activation: str = Field(description="Activation phase: elicit prior knowledge and workplace experience.")
    demonstration: str = Field(description="Demonstration phase: expert modelling and examples of quality work.")
    application: str = Field(description="Application phase: an authentic, scaffolded task mirroring real practice.")
    integration: str = Field(description="Integration phase: apply the concepts in a new or unfamiliar context.")
    reflectionAndAssessment: str = Field(description="Feedback, judgement cycle, self-assessment and reflection questions.")
    exercises: List[Exercise] = Field(description="Interactive exercises related to the lesson.")
    quiz: List[QuizQuestion] = Field(description="Short quiz questions testing understanding.")


# --------------------------
# Curriculum / options
# --------------------------
class GenerationOptions(BaseModel):
    model: Optional[str] = None
    style: str = "balanced"
    exercisesPerLesson: str = "3"
    quizQuestionsPerLesson: str = "3"
    lessonDuration: str = "60"
    codeExamples: bool = True
    visualElements: bool = False
    instructions: str = ""


class Curriculum(BaseModel):
    title: str
    description: str = ""
    lessons: List[str] = Field(default_factory=list)
    learningOutcomes: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    recommended: bool = False


class CurriculaData(BaseModel):
    curriculums: List[Curriculum] = Field(description="Distinct curriculum outlines, the recommended one first.")
    agentThoughts: List[str] = Field(default_factory=list, description="The reasoning behind the variations.")


class VariedCurriculumOutline(BaseModel):
    title: str
    description: str
    tags: List[str] = Field(description="The first tag is the difficulty level.")
    lessons: List[str] = Field(description="Lesson titles of the new course, in order.")


# --------------------------
# Capstone project
# --------------------------
class CapstoneProject(BaseModel):
    model_config = ConfigDict(json_schema_extra={
        "examples": [
            {
                "id": 1,
                "title": "Inventory Forecasting Dashboard",
                "description": "Build a dashboard that forecasts stock levels for a small retailer.",
                "industry": "Retail",
                "tags": ["data", "python"],
                "recommended": True,
                "detailedDescription": "",
                "techStack": ["Python", "pandas", "Streamlit"],
                "learningOutcomes": ["Clean and explore sales data"],
                "projectRequirements": [],
                "deliverables": [],
            }
        ]
    })

    id: int = 0
    title: str
    description: str = ""
    industry: str = ""
    tags: List[str] = Field(default_factory=list)
    recommended: bool = False
    detailedDescription: str = ""
    techStack: List[str] = Field(default_factory=list)
    learningOutcomes: List[str] = Field(default_factory=list)
    projectRequirements: List[str] = Field(default_factory=list)
    deliverables: List[str] = Field(default_factory=list)
    fileStructure: Optional[List[FileNode]] = None
    constraints: Optional[List[str]] = Field(None, description="Tools, data, roles, timeline and workplace conditions.")
    futureOrientedElement: Optional[str] = Field(None, description="An unfamiliar scenario or inquiry-based task.")
    participationModel: Optional[str] = Field(None, description="How the learner observes, assists and performs.")
    evidenceOfLearning: Optional[List[str]] = Field(None, description="Artefacts, demonstrations, self-evaluation.")
    assessmentFeedback: Optional[str] = Field(None, description="Assessment strategy, checkpoints and feedback loops.")
    judgementCriteria: Optional[List[str]] = Field(None, description="Quality expectations and observable indicators.")


class CapstoneProjectOutline(BaseModel):
    """A project idea, before it has an id, an industry or a detailed specification."""
    title: str
    description: str = Field(description="A one-sentence description.")
    tags: List[str] = Field(description="3-4 tags, the first one is the difficulty level.")
    recommended: bool = False
    techStack: List[str] = Field(default_factory=list, description="Empty for non-programming projects.")
    learningOutcomes: List[str] = Field(default_factory=list)
    projectRequirements: List[str] = Field(default_factory=list)
    deliverables: List[str] = Field(default_factory=list)


class ProjectIdeasData(BaseModel):
    projects: List[CapstoneProjectOutline]
    agentThoughts: List[str] = Field(default_factory=list)


# --------------------------
# Andragogical analysis
# --------------------------
class PoLDAnalysis(BaseModel):
    authentic: str
    alignment: str
    holistic: str
    feedback: str
    judgement: str
    future: str


class BoudAnalysis(BaseModel):
    situated: str
    mediated: str
    relational: str


class BillettAnalysis(BaseModel):
    affordances: str
    guidance: str


class MerrillAnalysis(BaseModel):
    problem: str
    activation: str
    demonstration: str
    application: str
    integration: str


class BloomAnalysis(BaseModel):
    progression: str


class VygotskyAnalysis(BaseModel):
    zpd: str
    scaffolding: str
    social: str
    mko: str


class AndragogicalAnalysis(BaseModel):
    poLD: PoLDAnalysis = Field(description="The 6 Principles of Learning Design.")
    boud: BoudAnalysis = Field(description="David Boud's features of practice.")
    billett: BillettAnalysis = Field(description="Stephen Billett's workplace learning.")
    merrill: MerrillAnalysis = Field(description="Merrill's First Principles of Instruction.")
    bloom: BloomAnalysis
    vygotsky: VygotskyAnalysis


# --------------------------
# Prompt assistance
# --------------------------
class PromptSuggestion(BaseModel):
    summary: str = Field(description="One sentence restating what the user is asking for.")
    suggestion: str = Field(description="An improved, more specific version of the user's prompt.")


# --------------------------
# Content library
# --------------------------
class LibraryLesson(BaseModel):
    title: str
    content: str


class ContentItem(BaseModel):
    id: Optional[int] = None
    name: str
    description: Optional[str] = None
    lessonCount: int = 0
    lessonDuration: int = 0
    difficulty: str = "beginner"
    created: Optional[str] = None
    notes: Optional[str] = None
    generationOptions: GenerationOptions = Field(default_factory=GenerationOptions)
    lessons: List[LibraryLesson] = Field(default_factory=list)
    progress: Optional[float] = None
    tags: Optional[List[str]] = None
    learningOutcomes: Optional[List[str]] = None


def dump_tree(nodes: Optional[List[FileNode]]) -> List[Dict[str, Any]]:
    """JSON shape used by the tree engine: files without children, folders without content."""
    if not nodes:
        return []
    dumped = []
    for node in nodes:
        if node.type == "file":
            dumped.append({"name": node.name, "type": "file", "content": node.content or ""})
        else:
            dumped.append({"name": node.name, "type": "folder", "children": dump_tree(node.children)})
    return dumped


def dump_project(project: CapstoneProject) -> Dict[str, Any]:
    data = project.model_dump(exclude={"fileStructure"})
    data["fileStructure"] = dump_tree(project.fileStructure) if project.fileStructure is not None else None
    return data


# --------------------------
# API requests / responses
# --------------------------
class ProjectRequest(BaseModel):
    project: CapstoneProject


class LessonPlanRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={
        "examples": [
            {
                "curriculum": {
                    "title": "Practical SQL for Analysts",
                    "description": "Query, join and aggregate business data.",
                    "lessons": ["Selecting and filtering rows", "Joins", "Aggregations"],
                    "learningOutcomes": ["Write correct analytical queries"],
                },
                "lessonTitle": "Joins",
                "options": {"exercisesPerLesson": "2", "quizQuestionsPerLesson": "3"},
            }
        ]
    })

    curriculum: Curriculum
    lessonTitle: str
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    previousLessons: List[Dict[str, Any]] = Field(default_factory=list)


class CurriculumLessonPlansRequest(BaseModel):
    curriculum: Curriculum
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class RegenerateLessonPartRequest(BaseModel):
    lessonPlan: Dict[str, Any]
    part: str = Field(..., description="Field name, e.g. 'activation' or 'quiz'.")
    index: Optional[int] = Field(None, ge=0, description="Item index for 'exercises' and 'quiz'.")
    instructions: str = ""
    curriculum: Optional[Curriculum] = None
    options: Optional[GenerationOptions] = None


class NewLessonPartRequest(BaseModel):
    lessonPlan: Dict[str, Any]
    part: str
    curriculum: Optional[Curriculum] = None
    options: Optional[GenerationOptions] = None


class RegenerateProjectPartRequest(BaseModel):
    project: CapstoneProject
    part: str
    index: Optional[int] = Field(None, ge=0)
    instructions: str = ""


class ApplyInstructionsRequest(BaseModel):
    project: CapstoneProject
    instructions: str


class FileCreateRequest(BaseModel):
    project: CapstoneProject
    parentPath: List[str] = Field(default_factory=list)
    type: Literal["file", "folder"]


class FileRenameRequest(BaseModel):
    project: CapstoneProject
    path: List[str]
    newName: str


class FileDeleteRequest(BaseModel):
    project: CapstoneProject
    path: List[str]


class SuggestionRequest(BaseModel):
    prompt: str
    kind: str = "course"


class PatchResponse(BaseModel):
    patch: Dict[str, Any]
    document: Dict[str, Any]


class NewItemResponse(BaseModel):
    item: Dict[str, Any]
    document: Dict[str, Any]


class TreeEditResponse(BaseModel):
    applied: bool
    message: Optional[str] = None
    path: Optional[List[str]] = None
    project: Dict[str, Any]


class JobResponse(BaseModel):
    task_id: str
    status: str
    result: Optional[Dict[str, Any]] = None
    progress: Optional[float] = None
    message: Optional[str] = None


class CurriculaRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    filters: Dict[str, str] = Field(default_factory=dict, description="e.g. {'difficulty': 'Beginner', 'numLessons': '5'}")


class ProjectIdeasRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    industry: str = "All"


class ProjectIdeasResponse(BaseModel):
    projects: List[CapstoneProject]
    agentThoughts: List[str] = Field(default_factory=list)


class AndragogyRequest(BaseModel):
    content: str = Field(..., min_length=1)
    kind: Literal["course", "project"] = "course"


class VaryCourseRequest(BaseModel):
    item: ContentItem
    lessonIndex: int = Field(..., ge=0)
    instructions: str = ""
