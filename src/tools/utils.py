from models.users import User


def serialize_log(log_obj):
    if log_obj is None:
        return None
    log_dict = log_obj.to_mongo().to_dict()

    for key in ["creator_user_id", "updater_user_id"]:
        if key in log_dict and log_dict[key] is not None:
            user_id = str(log_dict[key])
            log_dict[key] = user_id

            user = User.objects(id=user_id).first()
            if user:
                prefix = key.split("_")[0]
                log_dict[f"{prefix}_first_name"] = getattr(user, 'first_name', None)
                log_dict[f"{prefix}_last_name"] = getattr(user, 'last_name', None)

    return log_dict


def serialize_document(document) -> dict:
    data = document.to_mongo().to_dict()
    if '_id' in data:
        data['id'] = str(data.pop('_id'))
    if 'log' in data:
        data['log'] = serialize_log(document.log)
    return data
