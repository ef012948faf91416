import logging
from typing import Optional

import redis
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from src.config.settings import Settings, get_settings

_mongo_client: Optional[MongoClient] = None
_redis_client: Optional[redis.Redis] = None


# ==================================
# 🟢 MongoDB
# ==================================
def get_mongo_client(settings: Optional[Settings] = None) -> MongoClient:
    """Cliente único de Mongo (pymongo ya maneja el pool internamente)."""
    global _mongo_client
    if _mongo_client is None:
        settings = settings or get_settings()
        _mongo_client = MongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
        )
    return _mongo_client


def get_mongo_db(settings: Optional[Settings] = None) -> Database:
    settings = settings or get_settings()
    return get_mongo_client(settings)[settings.mongo_database]


def probar_mongo(settings: Optional[Settings] = None) -> bool:
    """Prueba la conexión a MongoDB usando la URI y la DB del entorno."""
    try:
        client = get_mongo_client(settings)
        client.admin.command("ping")
        logging.info(f"🟢 Mongo conectado a la base: {get_mongo_db(settings).name}")
        return True
    except PyMongoError as e:
        logging.error(f"❌ Error al conectar a MongoDB: {e}")
        return False


def ensure_indexes(db: Database) -> None:
    """
    Índices únicos que respaldan las validaciones check-then-insert
    (carrito, ratings, progreso) frente a requests concurrentes.
    """
    db["users"].create_index("email", unique=True)
    db["users"].create_index("mobileNumber", unique=True)
    db["carts"].create_index([("userId", ASCENDING), ("courseId", ASCENDING)], unique=True)
    db["ratings"].create_index([("user", ASCENDING), ("course", ASCENDING)], unique=True)
    db["ratings"].create_index("course")
    db["course_progress"].create_index([("userId", ASCENDING), ("courseId", ASCENDING)], unique=True)
    db["courses"].create_index("category")
    db["courses"].create_index("createdBy")
    db["topics"].create_index("course")
    db["subtopics"].create_index("topic")


# ==================================
# ⚡ Redis
# ==================================
def get_redis_client(settings: Optional[Settings] = None) -> redis.Redis:
    # El cliente es thread-safe y se reutiliza
    global _redis_client
    if _redis_client is None:
        settings = settings or get_settings()
        _redis_client = redis.from_url(
            settings.redis_uri,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
    return _redis_client


def probar_redis(settings: Optional[Settings] = None) -> bool:
    """Prueba la conexión a Redis con un PING."""
    try:
        get_redis_client(settings).ping()
        logging.info("⚡ Redis conectado.")
        return True
    except redis.RedisError as e:
        logging.error(f"❌ Error al conectar a Redis: {e}")
        return False


# ==================================
# Inicialización
# ==================================
def inicializar_conexiones(settings: Optional[Settings] = None) -> None:
    """Prueba las conexiones y crea los índices si Mongo responde."""
    logging.info("--- Probando Conexiones a Bases de Datos ---")
    if probar_mongo(settings):
        try:
            ensure_indexes(get_mongo_db(settings))
        except PyMongoError as e:
            logging.warning(f"[database] No se pudieron crear los índices: {e}")
    probar_redis(settings)
    logging.info("--------------------------------------------")


def cerrar_conexiones() -> None:
    global _mongo_client, _redis_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
