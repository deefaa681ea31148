import logging


class ActionExecutor:
    """Runs controller actions against a FormDriver.

    Every handler returns ``{"success": bool, "message": str}``.
    """

    def __init__(self, driver):
        self._driver = driver
        self._action_map = {
            "Input": self._execute_input,
            "Check": self._execute_check,
            "SelectOption": self._execute_select_option,
            "SelectFirst": self._execute_select_first,
            "Upload": self._execute_upload,
            "Tap": self._execute_tap,
        }

    async def execute(self, action):
        try:
            action_type = action.get("type")
            if not action_type:
                logging.error("Action type is required")
                return {"success": False, "message": "Action type is required"}

            execute_func = self._action_map.get(action_type)
            if not execute_func:
                logging.error(f"Unknown action type: {action_type}")
                return {"success": False, "message": f"Unknown action type: {action_type}"}

            logging.debug(f"Executing action: {action_type}")
            return await execute_func(action)

        except Exception as e:
            logging.error(f"Action execution failed: {str(e)}")
            return {"success": False, "message": f"Action execution failed with an exception: {e}"}

    async def execute_all(self, actions):
        """Run `actions` in order, stopping at the first failure."""
        results = []
        for action in actions:
            result = await self.execute(action)
            results.append(result)
            if not result.get("success"):
                break
        return results

    def _validate_params(self, action, required_params):
        for param in required_params:
            value = action
            for key in param.split("."):
                value = value.get(key) if isinstance(value, dict) else getattr(value, key, None)
                if value is None:
                    logging.error(f"Missing required parameter: {param}")
                    return False
        return True

    async def _execute_input(self, action):
        if not self._validate_params(action, ["locate", "param.value"]):
            return {"success": False, "message": "Missing locate or param.value for input action"}
        success = await self._driver.fill_field(action["locate"], action["param"]["value"])
        if success:
            return {"success": True, "message": "Input action successful."}
        return {"success": False, "message": "Input action failed. The field might not be available for typing."}

    async def _execute_check(self, action):
        if not self._validate_params(action, ["locate"]):
            return {"success": False, "message": "Missing locate for check action"}
        success = await self._driver.check(action["locate"])
        if success:
            return {"success": True, "message": "Check action successful."}
        return {"success": False, "message": "Check action failed."}

    async def _execute_select_option(self, action):
        if not self._validate_params(action, ["locate", "param.value"]):
            return {"success": False, "message": "Missing locate or param.value for select action"}
        param = action["param"]
        success = await self._driver.select_choice(action["locate"], param["value"], param.get("kind", "radio"))
        if success:
            return {"success": True, "message": f"Selected '{param['value']}'."}
        return {"success": False, "message": f"Option '{param['value']}' could not be selected."}

    async def _execute_select_first(self, action):
        if not self._validate_params(action, ["locate"]):
            return {"success": False, "message": "Missing locate for select-first action"}
        success = await self._driver.select_first(action["locate"], action.get("param", {}).get("kind", "radio"))
        if success:
            return {"success": True, "message": "Selected the first option."}
        return {"success": False, "message": "No option could be selected."}

    async def _execute_upload(self, action):
        if not self._validate_params(action, ["locate", "param.file_name", "param.mime_type"]):
            return {"success": False, "message": "Missing locate, param.file_name or param.mime_type for upload action"}
        param = action["param"]
        success = await self._driver.upload_file(action["locate"], param["file_name"], param["mime_type"])
        if success:
            return {"success": True, "message": "File upload successful."}
        return {"success": False, "message": "File upload failed."}

    async def _execute_tap(self, action):
        if not self._validate_params(action, ["param.name"]):
            return {"success": False, "message": "Missing param.name for tap action"}
        success = await self._driver.click_button(action["param"]["name"])
        if success:
            return {"success": True, "message": "Tap action successful."}
        return {"success": False, "message": "Tap action failed. The button might not be clickable."}
