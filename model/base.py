# model/base.py
from sqlalchemy import Integer
from sqlalchemy.dialects.mysql import BIGINT as MyBIGINT
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Unsigned BIGINT on MySQL; SQLite only autoincrements INTEGER primary keys.
PKType = MyBIGINT(unsigned=True).with_variant(Integer, "sqlite")
