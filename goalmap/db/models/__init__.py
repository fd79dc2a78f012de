from goalmap.db.models.generation_run import GenerationRun
from goalmap.db.models.roadmap import Roadmap

__all__ = ["GenerationRun", "Roadmap"]
