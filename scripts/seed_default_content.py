#!/usr/bin/env python3
"""
Seed the default categories and sample exercises
Does nothing when any category already exists
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from shared.content_repository import create_category, create_exercise
from shared.database import execute_query_one
from shared.exercise_validation import parse_exercise_payload

DEFAULT_CATEGORIES = [
    {'name': 'Tenses', 'description': 'Learn and practice different English tenses', 'icon': 'clock'},
    {'name': 'Grammar', 'description': 'Master English grammar rules and structures', 'icon': 'book'},
    {'name': 'Vocabulary', 'description': 'Expand your English vocabulary', 'icon': 'text.bubble'},
    {'name': 'Reading Comprehension', 'description': 'Improve reading skills and understanding', 'icon': 'doc.text'},
    {'name': 'Find the Mistake', 'description': 'Identify and correct common English errors',
     'icon': 'exclamationmark.circle'},
    {'name': 'Listening Skills', 'description': 'Enhance your English listening abilities', 'icon': 'ear'},
]

PRESENT_SIMPLE_INSTRUCTIONS = """Welcome to the Present Simple Tense exercise!

**Instructions:**
1. Read each question carefully
2. Choose the correct answer from the multiple choices
3. You can review your answers before submitting
4. After completing, you'll see your score and explanations

**Present Simple Tense Rules:**
- For I, you, we, they: use the base form of the verb
- For he, she, it: add -s or -es to the verb
- Example: "I work" but "She works"

**Tips:**
- Pay attention to the subject of the sentence
- Remember irregular verbs like "have/has" and "be/is/are"

Ready to begin? Tap "Start Exercise" below!"""

# Both samples belong to the first category (Tenses)
SAMPLE_EXERCISES = [
    {
        'title': 'Present Simple Tense',
        'description': 'Learn the basics of present simple tense',
        'instructions': PRESENT_SIMPLE_INSTRUCTIONS,
        'difficulty': 'beginner',
        'content': {
            'type': 'multiple-choice',
            'questions': [
                {
                    'id': '1',
                    'question': 'She ___ to work every day.',
                    'options': ['go', 'goes', 'going', 'gone'],
                    'correctAnswer': 'goes',
                    'explanation': 'For third person singular (she/he/it), we add -s to the verb.'
                },
                {
                    'id': '2',
                    'question': 'They ___ in London.',
                    'options': ['live', 'lives', 'living', 'lived'],
                    'correctAnswer': 'live',
                    'explanation': 'For plural subjects (they), we use the base form of the verb.'
                },
                {
                    'id': '3',
                    'question': 'He ___ coffee every morning.',
                    'options': ['drink', 'drinks', 'drinking', 'drank'],
                    'correctAnswer': 'drinks',
                    'explanation': 'For third person singular (he), we add -s to the verb.'
                }
            ]
        }
    },
    {
        'title': 'Past Simple Tense',
        'description': 'Practice past simple tense forms',
        'instructions': 'Choose the correct past simple form of the verb.',
        'difficulty': 'beginner',
        'content': {
            'type': 'multiple-choice',
            'questions': [
                {
                    'id': '1',
                    'question': 'They ___ to the party yesterday.',
                    'options': ['go', 'went', 'goes', 'going'],
                    'correctAnswer': 'went',
                    'explanation': 'Past simple of "go" is "went".'
                },
                {
                    'id': '2',
                    'question': 'I ___ my homework last night.',
                    'options': ['do', 'did', 'done', 'doing'],
                    'correctAnswer': 'did',
                    'explanation': 'Past simple of "do" is "did".'
                }
            ]
        }
    }
]


def seed_default_content():
    """Create default categories and sample exercises, returning (categories, exercises) created"""
    existing = execute_query_one("SELECT COUNT(*) FROM categories")
    if existing and existing[0] > 0:
        print("Default data already exists")
        return 0, 0

    category_ids = []
    for category in DEFAULT_CATEGORIES:
        created = create_category(category['name'], category['description'], category['icon'])
        category_ids.append(created.id)
        print(f"   ✅ Category created: {created.name} (ID: {created.id})")

    exercise_count = 0
    for sample in SAMPLE_EXERCISES:
        exercise = parse_exercise_payload(dict(sample, category=category_ids[0]))
        created = create_exercise(exercise)
        exercise_count += 1
        print(f"   ✅ Exercise created: {created.title} (ID: {created.id})")

    return len(category_ids), exercise_count


def main():
    print("=" * 80)
    print("Default Content Seed")
    print("=" * 80)

    categories, exercises = seed_default_content()
    print(f"\n🎉 Created {categories} categories and {exercises} exercises")


if __name__ == '__main__':
    main()
