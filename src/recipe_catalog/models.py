from sqlalchemy import Column, DateTime, Float, Integer, String, Text
# ingredient lines reference ingredients by id inside JSON, so no relationships
from .db import Base


class Category(Base):
    __tablename__ = "categories"
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    name_key = Column(String(200), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Ingredient(Base):
    __tablename__ = "ingredients"
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    name_key = Column(String(200), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Recipe(Base):
    __tablename__ = "recipes"
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, index=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    ingredients = Column(Text, nullable=False)  # JSON-encoded list of lines
    steps = Column(Text, nullable=True)  # JSON-encoded list
    servings = Column(Float, nullable=False)
    category_id = Column(String(36), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), index=True, nullable=False)
