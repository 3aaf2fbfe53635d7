from sqlalchemy.orm import joinedload

from bulletin.core import db, utcnow


class News(db.Model):
    __tablename__ = 'news'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    author = db.relationship('User', lazy='joined')

    def __repr__(self):
        return f"<News {self.id} {self.title!r}>"


class NewsDatabase:
    @staticmethod
    def get_all_articles(limit=None):
        """All articles with their author loaded, newest first"""
        query = (
            News.query
            .options(joinedload(News.author))
            .order_by(News.date.desc(), News.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def create_article(title, content, author, date=None):
        """Create new article; title and content are required"""
        title = (title or '').strip()
        content = (content or '').strip()
        if not title or not content:
            raise ValueError("Title and content cannot be empty")

        article = News(title=title, content=content, author_id=author.id)
        if date is not None:
            article.date = date
        db.session.add(article)
        db.session.commit()
        return article
