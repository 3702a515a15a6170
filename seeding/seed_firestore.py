from datetime import datetime, timedelta, timezone

from google.cloud import firestore

from bua.db.firestore import get_db

# Run from the repo root: python -m seeding.seed_firestore

def seed_demo():
    db = get_db()
    now = datetime.now(timezone.utc)

    seed_data = {
        "cases/case001": {
            "studentId": "student123@example.com",
            "title": "Bullying Incident in Cafeteria",
            "category": "Bullying",
            "description": "During lunch, a group of older students repeatedly harassed Sarah.",
            "redactedDescription": "During lunch, a group of older students repeatedly harassed [REDACTED_STUDENT].",
            "status": "Resolved",
            "history": [
                {"id": "msg1", "sender": "Student", "text": "Submitted report.", "timestamp": now - timedelta(days=5)},
                {"id": "msg2", "sender": "Admin", "text": "Thank you for your report. We are looking into this.",
                 "timestamp": now - timedelta(days=4)},
            ],
            "resolutionNote": "Met with all students involved. Implemented new cafeteria monitoring procedures.",
            "createdAt": now - timedelta(days=5),
        },
        "cases/case002": {
            "studentId": "student123@example.com",
            "title": "Broken locker",
            "category": "Facilities",
            "description": "My locker (17B) in the west wing won't close properly.",
            "redactedDescription": "My locker (17B) in the west wing won't close properly.",
            "status": "Under Review",
            "history": [
                {"id": "msg3", "sender": "Student", "text": "Submitted report.", "timestamp": now - timedelta(days=2)},
            ],
            "resolutionNote": "",
            "createdAt": now - timedelta(days=2),
        },
        "journal/journal001": {
            "title": "Improving Cafeteria Safety",
            "content": (
                "Based on recent feedback, we have updated our supervision protocols in the cafeteria "
                "during lunch periods to ensure a safer and more welcoming environment for all students. "
                "Staff will be more visible, and we encourage students to report any concerns immediately."
            ),
            "relatedCaseIds": ["case001"],
            "evidenceSummary": [{"caseId": "case001", "evidenceCount": 0, "evidenceTypes": []}],
            "publishedAt": firestore.SERVER_TIMESTAMP,
        },
    }

    for path, data in seed_data.items():
        collection, doc_id = path.split("/")
        db.collection(collection).document(doc_id).set(data)

    print("Seed data uploaded successfully!")

if __name__ == "__main__":
    seed_demo()
