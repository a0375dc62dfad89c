from models import db
from datetime import datetime

class UserProgress(db.Model):
    __tablename__ = "user_progress"
    __table_args__ = (
        db.UniqueConstraint("user_id", "category", "metric", name="uq_user_progress_metric"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    category = db.Column(db.String(50), nullable=False)  # 'quizzes', 'points'
    metric = db.Column(db.String(50), nullable=False)
    value = db.Column(db.Float, nullable=False, default=0)
    last_updated = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "category": self.category,
            "metric": self.metric,
            "value": self.value,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }
