"""
Tests for the markdown rendering of lesson plans.
"""

from src.creatorai.formatting import lesson_plan_to_markdown


class TestLessonPlanToMarkdown:
    def test_sections_in_order(self, sample_lesson_plan):
        markdown = lesson_plan_to_markdown(sample_lesson_plan)
        headings = [line for line in markdown.splitlines() if line.startswith("## ")]
        assert headings == [
            "## 1. Overview", "## 2. Learning Objectives", "## 3. Activation", "## 4. Demonstration",
            "## 5. Application", "## 6. Integration", "## 7. Feedback & Reflection", "## 8. Exercises", "## 9. Quiz",
        ]
        assert markdown.startswith("## 1. Overview\n\nJoins overview\n\n## 2. Learning Objectives\n\n"
                                   "- Explain inner joins\n\n")

    def test_exercise_and_quiz_blocks(self, sample_lesson_plan):
        markdown = lesson_plan_to_markdown(sample_lesson_plan)
        assert "**Exercise 1**\n\n**Problem:**\nproblem 0\n\n**Hint:**\n*hint 0*\n\n" in markdown
        assert "**Answer:**\n```\nanswer 0\n```\n\n**Explanation:**\nexplanation 0\n\n---\n\n" in markdown
        assert "**Question 2: question 1**\n\n- [x] a\n- [ ] b\n- [ ] c\n" in markdown

    def test_empty_sections_are_left_out(self):
        markdown = lesson_plan_to_markdown({"overview": "", "activation": "Warm up.", "exercises": [], "quiz": []})
        assert markdown == "## 3. Activation\n\nWarm up.\n\n"
