from .splitter import SubjectPartition, assign_subjects, seeded_rank, split_by_subject

__all__ = ["SubjectPartition", "assign_subjects", "seeded_rank", "split_by_subject"]
